from django.urls import path

from .views import CurrentOrderView

urlpatterns = [
    path('current/', CurrentOrderView.as_view(), name='current-order'),
]
