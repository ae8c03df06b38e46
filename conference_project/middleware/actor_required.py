from dataclasses import dataclass

from django.http import JsonResponse


@dataclass(frozen=True)
class Actor:
    id: str
    role: str

    @property
    def is_editor(self):
        return self.role == "editor"


class ActorRequiredMiddleware:
    """
    Resolves the calling user for the JSON API.

    Identity arrives in the ``X-User-Id`` / ``X-User-Role`` headers set
    by the front proxy that owns sessions. Everything outside ``/api/``
    passes through untouched.
    """

    def __init__(self, get_response):
        self.get_response = get_response

        self.API_PREFIX = "/api/"
        self.EDITOR_PREFIX = "/api/editor/"

    def __call__(self, request):
        path = request.path
        request.actor = None

        # Non-API paths (admin, static)
        if not path.startswith(self.API_PREFIX):
            return self.get_response(request)

        actor_id = request.headers.get("X-User-Id", "").strip()
        if not actor_id:
            return JsonResponse(
                {"errorCode": "not_authenticated", "message": "Not authenticated."},
                status=401,
            )

        actor = Actor(
            id=actor_id,
            role=request.headers.get("X-User-Role", "").strip().lower(),
        )

        # 🔒 ROLE-BASED ACCESS CONTROL
        if path.startswith(self.EDITOR_PREFIX) and not actor.is_editor:
            return JsonResponse(
                {"errorCode": "forbidden", "message": "Editor role is required."},
                status=403,
            )

        request.actor = actor
        return self.get_response(request)
