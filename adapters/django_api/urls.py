"""
Commerce Django adapter URL routing.
"""

from django.urls import path

from adapters.django_api import views


urlpatterns = [
    path("inventory/warehouses", views.warehouses_list_view),
    path("inventory/warehouses/register", views.warehouses_register_view),
    path("inventory/warehouses/rename", views.warehouses_rename_view),
    path("inventory/items", views.inventory_items_view),
    path("inventory/receive", views.inventory_receive_view),
    path("inventory/reserve", views.inventory_reserve_view),
    path("inventory/release", views.inventory_release_view),
    path("inventory/fulfill", views.inventory_fulfill_view),
    path("inventory/reorder-point", views.inventory_reorder_point_view),
    path("inventory/status", views.inventory_status_view),
    path("inventory/low-stock", views.inventory_low_stock_view),
    path("pricing/price-books", views.price_books_list_view),
    path("pricing/price-books/upsert", views.price_books_upsert_view),
    path("pricing/price-books/delete", views.price_books_delete_view),
    path("pricing/price-books/promote", views.price_books_promote_view),
    path("pricing/resolve", views.price_resolve_view),
]
