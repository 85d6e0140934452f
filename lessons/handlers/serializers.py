"""Serializers for transforming domain models to API responses and parsing requests."""

from rest_framework import serializers


class LessonSerializer(serializers.Serializer):
    """Serializer for Lesson domain model."""

    id = serializers.UUIDField(source="id.value")
    topic = serializers.CharField()
    location = serializers.CharField()
    price = serializers.IntegerField(source="price.amount")
    capacity = serializers.IntegerField(source="capacity.value")
    initial_capacity = serializers.IntegerField(source="initial_capacity.value")
    image = serializers.CharField(allow_null=True)
    updated_at = serializers.DateTimeField()


class OrderLineSerializer(serializers.Serializer):
    """Serializer for OrderLine domain model."""

    lesson_id = serializers.UUIDField(source="lesson_id.value")
    seats = serializers.IntegerField(source="seats.value")


class OrderSerializer(serializers.Serializer):
    """Serializer for Order domain model."""

    id = serializers.UUIDField(source="id.value")
    name = serializers.CharField()
    phone = serializers.CharField()
    lines = OrderLineSerializer(many=True)
    created_at = serializers.DateTimeField()


class OrderLineRequestSerializer(serializers.Serializer):
    lesson_id = serializers.CharField()
    seats = serializers.IntegerField()


class OrderRequestSerializer(serializers.Serializer):
    """Input format for POST /api/orders. Business rules live in OrderService."""

    name = serializers.CharField(allow_blank=True)
    phone = serializers.CharField(allow_blank=True)
    lines = OrderLineRequestSerializer(many=True, allow_empty=True)
