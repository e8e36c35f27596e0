from __future__ import annotations

from typing import Any, List, Optional

from telegram import ChatPermissions, InlineKeyboardMarkup

from .i18n import t


# Everything a muted member loses.
MUTED_PERMISSIONS = ChatPermissions.no_permissions()

# Member capabilities restored by /unmute; admin-only rights stay with the group defaults.
UNMUTED_PERMISSIONS = ChatPermissions(
    can_send_messages=True,
    can_send_audios=True,
    can_send_documents=True,
    can_send_photos=True,
    can_send_videos=True,
    can_send_video_notes=True,
    can_send_voice_notes=True,
    can_send_polls=True,
    can_send_other_messages=True,
    can_add_web_page_previews=True,
    can_manage_topics=True,
)


def user_label(lang: str, user: Any, user_id: Optional[int] = None) -> str:
    """``@username (ID: n)``, falling back to the first name or a placeholder."""
    uid = user_id if user_id is not None else getattr(user, "id", None)
    username = getattr(user, "username", None)
    first_name = getattr(user, "first_name", None)
    name = f"@{username}" if username else first_name or t(lang, "user.unknown")
    return t(lang, "user.display", name=name, user_id=uid)


def button_labels(markup: Optional[InlineKeyboardMarkup]) -> List[str]:
    labels: List[str] = []
    if not markup or not markup.inline_keyboard:
        return labels
    for row in markup.inline_keyboard:
        for button in row or ():
            if button and button.text:
                labels.append(button.text)
    return labels
