"""
Orders API views.
"""
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .current import get_current_order
from .serializers import OrderSerializer


class CurrentOrderView(APIView):
    """
    GET  /api/orders/current/ — текущая корзина (404 если её нет)
    POST /api/orders/current/ — текущая корзина, создаётся при отсутствии
    """
    permission_classes = [AllowAny]

    def get(self, request):
        order = get_current_order(request._request)
        if order is None:
            raise NotFound('Корзина пуста.')
        return Response(OrderSerializer(order).data)

    def post(self, request):
        order = get_current_order(request._request, create_order_if_necessary=True)
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)
