"""
Base
------------------------

The base view for the API. This view contains functionality
required in all other views.
"""
from http import HTTPStatus
from typing import Optional, Tuple, Dict, Any

from aiohttp.abc import Application
from aiohttp.web import View, AbstractRoute
from aiohttp_cors import CorsConfig, CorsViewMixin, ResourceOptions

from deisbikes.serializer import JSendStatus
from deisbikes.serializer.models import SnapshotSchema
from deisbikes.service.coordinator import SessionCoordinator, OperationResult
from deisbikes.service.errors import ExhaustionError, ExternalError, ChecklistIncompleteError
from deisbikes.service.notifications import NotificationLogger

FAILURE_STATUS = {
    "no_bikes": HTTPStatus.SERVICE_UNAVAILABLE,
    "lock_failed": HTTPStatus.BAD_GATEWAY,
    "rejected": HTTPStatus.CONFLICT,
}
"""Maps the failure names a view can return to their status codes."""


class ViewConfigurationError(Exception):
    """
    Raised if the view doesn't provide a URL.
    """


class BaseView(View, CorsViewMixin):
    """
    The base view that all other views extend. Contains some useful
    helper functions that the extending classes can use.
    """

    url: str
    name: Optional[str]
    route: AbstractRoute
    session_coordinator: SessionCoordinator
    notification_logger: NotificationLogger

    cors_config = {
        "*": ResourceOptions(
            allow_credentials=True,
            expose_headers="*",
            allow_headers="*",
            allow_methods="*",
        )
    }

    @classmethod
    def register_route(cls, app: Application, base: Optional[str] = None):
        """
        Registers the view with the given router.

        :raises ViewConfigurationError: If the URL hasn't been set on the given view.
        """
        try:
            url = base + cls.url if base is not None else cls.url
        except AttributeError:
            raise ViewConfigurationError("No URL provided!")

        kwargs = {}
        name = getattr(cls, "name", None)
        if name is not None:
            kwargs["name"] = name

        cls.route = app.router.add_view(url, cls, **kwargs)
        cls.session_coordinator = app["session_coordinator"]
        cls.notification_logger = app["notification_logger"]

    @classmethod
    def enable_cors(cls, cors: CorsConfig):
        """Enables CORS on the view."""
        try:
            cors.add(cls.route, webview=True)
        except AttributeError as error:
            raise ViewConfigurationError("No route assigned. Please register the route first.") from error

    @staticmethod
    def respond(result: OperationResult, success_name="rental", **extra) -> Tuple[str, Dict[str, Any]]:
        """
        Turns the result of a coordinator operation into a named JSend response
        for the :func:`~deisbikes.serializer.decorators.returns` decorator.
        """
        if result.ok:
            return success_name, {
                "status": JSendStatus.SUCCESS,
                "data": {"rental": result.snapshot, **extra}
            }

        error = result.error
        data = {"message": error.message, "code": error.code, "rental": SnapshotSchema().dump(result.snapshot)}
        if isinstance(error, ChecklistIncompleteError):
            data["missing"] = error.missing

        if isinstance(error, ExhaustionError):
            name = "no_bikes"
        elif isinstance(error, ExternalError):
            name = "lock_failed"
        else:
            name = "rejected"

        return name, {"status": JSendStatus.FAIL, "data": data}
