"""FilterSet definitions for venue listing."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .models import Venue


class VenueFilterSet(django_filters.FilterSet):
    location = django_filters.CharFilter(field_name="location", lookup_expr="icontains")
    sport = django_filters.NumberFilter(method="filter_sport")
    price_min = django_filters.NumberFilter(field_name="price_per_hour", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="price_per_hour", lookup_expr="lte")

    class Meta:
        model = Venue
        fields = ["location", "sport"]

    def filter_sport(self, queryset, name, value):  # type: ignore
        # A venue matches on its primary sport or on any configured resource
        return queryset.filter(Q(sport_id=value) | Q(resources__sport_id=value)).distinct()
