"""
Serializers for calculation request API endpoints.
"""

from rest_framework import serializers

from core.domain.value_objects import MAX_USAGE_QUANTITY, RequestStatus

LISTABLE_STATUSES = [
    request_status.value
    for request_status in RequestStatus
    if request_status != RequestStatus.DELETED
]


class AddServiceRequestSerializer(serializers.Serializer):
    """Serializer for add-to-request."""

    service_id = serializers.UUIDField(required=True)


class UpdateRequestParametersSerializer(serializers.Serializer):
    """Serializer for partial usage parameter update. Omitted fields are kept."""

    users = serializers.IntegerField(required=False, min_value=0, max_value=MAX_USAGE_QUANTITY)
    cores = serializers.IntegerField(required=False, min_value=0, max_value=MAX_USAGE_QUANTITY)
    period = serializers.IntegerField(required=False, min_value=1, max_value=MAX_USAGE_QUANTITY)


class UpdateSupportCoefficientSerializer(serializers.Serializer):
    """Serializer for support coefficient update. Values are clamped, not rejected."""

    support_coefficient = serializers.DecimalField(max_digits=None, decimal_places=None)


class ListRequestsQuerySerializer(serializers.Serializer):
    """Serializer for request list filters."""

    status = serializers.ChoiceField(choices=LISTABLE_STATUSES, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        """Validate the date range."""
        date_from = attrs.get("date_from")
        date_to = attrs.get("date_to")
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError("date_from must not be after date_to")
        return attrs


class RequestLineDTOSerializer(serializers.Serializer):
    """Serializer for RequestLineDTO."""

    service_id = serializers.UUIDField()
    name = serializers.CharField()
    license_type = serializers.CharField()
    base_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    image_url = serializers.CharField(allow_null=True)
    support_coefficient = serializers.DecimalField(max_digits=3, decimal_places=2)
    sub_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    pricing_status = serializers.CharField()


class CalculationRequestSummarySerializer(serializers.Serializer):
    """Serializer for CalculationRequestDTO without lines."""

    id = serializers.UUIDField()
    status = serializers.CharField()
    creator_id = serializers.IntegerField()
    moderator_id = serializers.IntegerField(allow_null=True)
    users = serializers.IntegerField()
    cores = serializers.IntegerField()
    period = serializers.IntegerField()
    total_cost = serializers.DecimalField(max_digits=14, decimal_places=2)
    ready_count = serializers.IntegerField()
    created_at = serializers.DateTimeField()
    formatted_at = serializers.DateTimeField(allow_null=True)
    completed_at = serializers.DateTimeField(allow_null=True)


class CalculationRequestDetailSerializer(CalculationRequestSummarySerializer):
    """Serializer for CalculationRequestDTO with lines."""

    lines = RequestLineDTOSerializer(many=True)


class DispatchSummarySerializer(serializers.Serializer):
    """Serializer for DispatchSummaryDTO."""

    dispatched = serializers.IntegerField()
    failed = serializers.IntegerField()
    skipped = serializers.IntegerField()


class CompletionResultSerializer(serializers.Serializer):
    """Serializer for CompletionResultDTO."""

    request = CalculationRequestDetailSerializer()
    dispatch = DispatchSummarySerializer()


class CartSerializer(serializers.Serializer):
    """Serializer for CartDTO."""

    request_id = serializers.UUIDField(allow_null=True)
    line_count = serializers.IntegerField()


class AddServiceResultSerializer(serializers.Serializer):
    """Serializer for AddServiceResultDTO."""

    request_id = serializers.UUIDField()
    service_id = serializers.UUIDField()
    created = serializers.BooleanField()
    line_count = serializers.IntegerField()
