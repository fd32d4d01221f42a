from rest_framework.authentication import SessionAuthentication


class CookieSessionAuthentication(SessionAuthentication):
    """
    Django session cookie authentication.

    Advertises a WWW-Authenticate scheme so anonymous requests get 401
    instead of DRF's default 403 for session auth.
    """

    def authenticate_header(self, request):
        return 'Session'
