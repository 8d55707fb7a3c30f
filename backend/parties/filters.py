import django_filters
from django.db.models import Q
from .models import Contact


class ContactFilter(django_filters.FilterSet):
    """Contact list filters; accepts contactType as an alias of contact_type"""
    contact_type = django_filters.ChoiceFilter(choices=Contact.TYPE_CHOICES)
    contactType = django_filters.ChoiceFilter(field_name='contact_type', choices=Contact.TYPE_CHOICES)
    status = django_filters.ChoiceFilter(choices=Contact.STATUS_CHOICES)
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Contact
        fields = ['contact_type', 'status']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(company__icontains=value) |
            Q(email__icontains=value)
        )
