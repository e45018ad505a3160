from django.urls import include, path
from rest_framework.routers import DefaultRouter

from modules.orders.views import OrderViewSet
from modules.products.views import ProductViewSet

router = DefaultRouter(trailing_slash=True)
router.register("products", ProductViewSet, basename="product")
router.register("orders", OrderViewSet, basename="order")

urlpatterns = [
    # Domain modules, versioned API
    path("api/v1/", include(router.urls)),
]
