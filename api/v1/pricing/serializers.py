"""
Serializers for pricing callback endpoints.
"""

from decimal import Decimal

from rest_framework import serializers

from core.domain.value_objects import MAX_MONEY


class ReceiveSubtotalRequestSerializer(serializers.Serializer):
    """
    Serializer for a pricer's sub-total callback.

    Any precision is accepted; the ingestion handler rounds to cents.
    """

    subtotal = serializers.DecimalField(
        max_digits=None, decimal_places=None, max_value=MAX_MONEY
    )

    def validate_subtotal(self, value):
        """Validate sub-total is positive."""
        if value <= Decimal("0"):
            raise serializers.ValidationError("Sub-total must be greater than zero")
        return value


class SubtotalReceiptSerializer(serializers.Serializer):
    """Serializer for SubtotalReceiptDTO."""

    request_id = serializers.UUIDField()
    service_id = serializers.UUIDField()
    sub_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_cost = serializers.DecimalField(max_digits=14, decimal_places=2)
