"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from django.apps import apps
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from lessons.apps import Services
from lessons.domain.errors import DomainError
from lessons.handlers.errors import error_response, invalid_request_response
from lessons.handlers.serializers import LessonSerializer, OrderRequestSerializer, OrderSerializer

IDEMPOTENCY_HEADER = "Idempotency-Key"


def get_services() -> Services:
    return apps.get_app_config("lessons").services


class HealthView(APIView):
    """Handler for GET /"""

    def get(self, request: Request) -> Response:
        return Response({"status": "ok", "message": "Lessons API is running"})


class LessonListView(APIView):
    """Handler for GET /api/lessons"""

    def get(self, request: Request) -> Response:
        sort = request.query_params.get("sort", "topic")
        try:
            lessons = get_services().lessons.list_lessons(sort=sort)
        except DomainError as error:
            return error_response(error)
        return Response(LessonSerializer(lessons, many=True).data)


class LessonDetailView(APIView):
    """Handler for GET, PUT and PATCH /api/lessons/{lesson_id}"""

    def get(self, request: Request, lesson_id: str) -> Response:
        try:
            lesson = get_services().lessons.get_lesson(lesson_id)
        except DomainError as error:
            return error_response(error)
        return Response(LessonSerializer(lesson).data)

    def put(self, request: Request, lesson_id: str) -> Response:
        fields = request.data if isinstance(request.data, dict) else {}
        try:
            lesson = get_services().lessons.update_lesson_fields(lesson_id, dict(fields))
        except DomainError as error:
            return error_response(error)
        return Response(LessonSerializer(lesson).data)

    patch = put


class OrderCreateView(APIView):
    """Handler for POST /api/orders"""

    def post(self, request: Request) -> Response:
        serializer = OrderRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_request_response(serializer.errors)
        data = serializer.validated_data
        try:
            order = get_services().orders.create_order(
                name=data["name"],
                phone=data["phone"],
                lines=data["lines"],
                idempotency_key=request.headers.get(IDEMPOTENCY_HEADER),
            )
        except DomainError as error:
            return error_response(error)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


class OrderDetailView(APIView):
    """Handler for GET /api/orders/{order_id}"""

    def get(self, request: Request, order_id: str) -> Response:
        try:
            order = get_services().orders.get_order(order_id)
        except DomainError as error:
            return error_response(error)
        return Response(OrderSerializer(order).data)
