from starlette.middleware.base import BaseHTTPMiddleware

from placesapi.core.logging import get_request_id
from placesapi.core.tracing import start_span


def route_template(request) -> str:
    """Matched route path (`/api/countries/{file}`), or the raw path when nothing matched."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class TracingMiddleware(BaseHTTPMiddleware):
    """
    One server span per request, named after the matched route.

    The span carries the response status, and the error code when an
    AppError handler answered the request.
    """

    async def dispatch(self, request, call_next):
        with start_span(
            f"{request.method} {request.url.path}",
            {"http.method": request.method, "http.target": request.url.path},
        ) as span:
            try:
                response = await call_next(request)
            except Exception as exc:
                if span is not None:
                    span.set_attribute("error.type", type(exc).__name__)
                raise
            if span is not None:
                template = route_template(request)
                span.update_name(f"{request.method} {template}")
                span.set_attribute("http.route", template)
                span.set_attribute("http.status_code", response.status_code)
                # RequestIdMiddleware runs inside this one
                request_id = getattr(request.state, "request_id", None) or get_request_id()
                if request_id:
                    span.set_attribute("request_id", request_id)
                error_code = getattr(request.state, "error_code", None)
                if error_code:
                    span.set_attribute("error.code", error_code)
            return response
