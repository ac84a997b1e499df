"""Localized transactional email bodies, rendered with a sandboxed autoescaping Jinja2 environment."""

import logging

from jinja2 import StrictUndefined, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from storefront.schemas.auth import LangCode

logger = logging.getLogger(__name__)

_env = SandboxedEnvironment(
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=StrictUndefined,
)

_RESET_PASSWORD_HTML = """<div style="font-family: Arial, sans-serif; line-height: 1.5;">
  <p>{{ t.greeting }}{% if full_name %} {{ full_name }}{% endif %},</p>
  <p>{{ t.intro }}</p>
  <p><a href="{{ reset_url }}" style="display: inline-block; padding: 10px 16px; background: #1677ff; color: #fff; text-decoration: none; border-radius: 4px;">{{ t.action }}</a></p>
  <p>{{ t.outro }}</p>
</div>"""

_RESET_PASSWORD_TEXTS = {
    LangCode.EN: {
        "subject": "Reset password",
        "greeting": "Hello",
        "intro": "We received a request to reset the password for your account.",
        "action": "Reset password",
        "outro": "If you did not request a password reset, you can safely ignore this email.",
    },
    LangCode.VN: {
        "subject": "Đặt lại mật khẩu",
        "greeting": "Xin chào",
        "intro": "Chúng tôi đã nhận được yêu cầu đặt lại mật khẩu cho tài khoản của bạn.",
        "action": "Đặt lại mật khẩu",
        "outro": "Nếu bạn không yêu cầu đặt lại mật khẩu, vui lòng bỏ qua email này.",
    },
}


def render(template_string: str, **variables: object) -> str:
    """Render a template string; every interpolated value is HTML-escaped."""
    try:
        return _env.from_string(template_string).render(**variables)
    except TemplateError as e:
        logger.error("Email template rendering failed", extra={"error": str(e)})
        raise


def reset_password_email(
    lang_code: LangCode, full_name: str | None, reset_url: str
) -> tuple[str, str]:
    """Return (subject, html) for the reset-password email in the given language."""
    texts = _RESET_PASSWORD_TEXTS.get(lang_code, _RESET_PASSWORD_TEXTS[LangCode.EN])
    html = render(
        _RESET_PASSWORD_HTML, t=texts, full_name=full_name or "", reset_url=reset_url
    )
    return texts["subject"], html
