"""
Tenants app — несколько магазинов (tenants) на одном деплое.

Магазин определяется по hostname запроса:
    shop-a.example.com → TenantDomain(host='shop-a.example.com') → Tenant(code='shop_a')
    неизвестный host   → Tenant(is_default=True)
    нет default        → None (запрос обслуживается без магазина, "глобально")

Модель данных:
    Tenant ← N TenantDomain (домены магазина)
    Tenant ← M2M Product, FK Taxonomy, Order, Tracker
"""
