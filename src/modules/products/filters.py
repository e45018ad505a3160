import django_filters

from modules.products.models import Product


class ProductFilter(django_filters.FilterSet):
    title = django_filters.CharFilter(field_name="title", lookup_expr="icontains")
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    published = django_filters.BooleanFilter(field_name="published")

    class Meta:
        model = Product
        fields = ["title", "min_price", "max_price", "published"]
