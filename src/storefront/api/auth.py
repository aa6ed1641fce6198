"""
Auth API - email registration/login, tokens, profile and password management.
"""

import logging
from typing import Any, Dict, Optional

from storefront.models.identity import User
from .client import ApiClient

logger = logging.getLogger(__name__)


class AuthService:
    base_path = "/auth"

    def __init__(self, client: ApiClient):
        self.client = client
        self.tokens = client.tokens

    # ---------------- registration ----------------

    def register_email(self, email: str, password: str, name: Optional[str] = None) -> Dict[str, Any]:
        data = self.client.post(f"{self.base_path}/register-email", {"email": email, "password": password, "name": name})
        self._store_session(data)
        return data

    def verify_email(self, email: str, code: str) -> Dict[str, Any]:
        return self.client.post(f"{self.base_path}/verify-email", {"email": email, "code": code})

    def resend_email_verification(self, email: str) -> Dict[str, Any]:
        return self.client.post(f"{self.base_path}/resend-email-verification", {"email": email})

    # ---------------- login / session ----------------

    def login_email(self, email: str, password: str) -> Dict[str, Any]:
        """
        Log in with email and password.

        When the backend answers `requiresEmailVerification` nothing is stored
        and the response is returned as-is.
        """
        data = self.client.post(f"{self.base_path}/login-email", {"email": email, "password": password})
        if data.get("requiresEmailVerification"):
            logger.info(f"[AUTH] {email} must verify email before login")
            return data
        self._store_session(data)
        return data

    def refresh_token(self) -> str:
        return self.client.refresh_access_token()

    def logout(self) -> None:
        self.client.post(f"{self.base_path}/logout", {}, retry_on_401=False)

    def logout_all(self) -> Dict[str, Any]:
        return self.client.post(f"{self.base_path}/logout-all", {})

    def get_me(self) -> Optional[User]:
        data = self.client.get(f"{self.base_path}/me")
        raw_user = data.get("user") if isinstance(data, dict) else None
        if not raw_user:
            return None
        self.tokens.save_user(raw_user)
        return User.from_api(raw_user)

    # ---------------- password management ----------------

    def forgot_password(self, email: str) -> Dict[str, Any]:
        return self.client.post(f"{self.base_path}/forgot-password", {"email": email})

    def verify_reset_password(self, email: str, code: str) -> Dict[str, Any]:
        return self.client.post(f"{self.base_path}/verify-reset-password", {"email": email, "code": code})

    def reset_password(self, email: str, new_password: str, reset_token: Optional[str] = None) -> Dict[str, Any]:
        body = {"email": email, "newPassword": new_password, "resetToken": reset_token}
        return self.client.post(f"{self.base_path}/reset-password", body)

    def change_password(self, old_password: str, new_password: str) -> Dict[str, Any]:
        return self.client.put(f"{self.base_path}/change-password", {"oldPassword": old_password, "newPassword": new_password})

    def _store_session(self, data: Dict[str, Any]) -> None:
        # Registration answers with `token`, login with `accessToken`.
        token = data.get("accessToken") or data.get("token")
        if token:
            self.tokens.access_token = token
        if data.get("refreshToken"):
            self.tokens.refresh_token = data["refreshToken"]
        if data.get("user"):
            self.tokens.save_user(data["user"])
