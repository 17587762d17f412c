"""
Serializers for catalog API endpoints.
"""

from rest_framework import serializers

from core.domain.value_objects import LicenseType, SupportLevel

LICENSE_TYPES = [license_type.value for license_type in LicenseType]
SUPPORT_LEVELS = [support_level.value for support_level in SupportLevel]


class CreateLicenseServiceRequestSerializer(serializers.Serializer):
    """Serializer for create catalog entry request."""

    name = serializers.CharField(required=True, max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    base_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    license_type = serializers.ChoiceField(choices=LICENSE_TYPES)
    support_level = serializers.ChoiceField(
        choices=SUPPORT_LEVELS, required=False, default="standard"
    )
    max_users = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    validity_years = serializers.IntegerField(required=False, default=1, min_value=1)
    image_url = serializers.CharField(required=False, allow_null=True, max_length=500)


class UpdateLicenseServiceRequestSerializer(serializers.Serializer):
    """
    Serializer for sparse catalog entry update.

    Omitted fields are not provided. Provided values go to the domain for
    validation, so an empty name or a non-positive price is rejected there.
    """

    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    base_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    license_type = serializers.ChoiceField(choices=LICENSE_TYPES, required=False)
    support_level = serializers.ChoiceField(choices=SUPPORT_LEVELS, required=False)
    max_users = serializers.IntegerField(required=False, min_value=1)
    validity_years = serializers.IntegerField(required=False, min_value=1)
    image_url = serializers.CharField(required=False, max_length=500)


class LicenseServiceDTOSerializer(serializers.Serializer):
    """Serializer for LicenseServiceDTO."""

    id = serializers.UUIDField()
    name = serializers.CharField()
    description = serializers.CharField()
    base_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    license_type = serializers.CharField()
    support_level = serializers.CharField()
    max_users = serializers.IntegerField(allow_null=True)
    validity_years = serializers.IntegerField()
    image_url = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()
