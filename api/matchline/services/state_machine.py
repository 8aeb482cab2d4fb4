from ..errors import ConversationEnded, InvalidInput

STATUSES = {"active", "snoozed", "ended"}
OPEN_STATUSES = {"active", "snoozed"}


def transition_status(current: str, action: str) -> str:
    if current not in STATUSES:
        raise InvalidInput(f"Unknown conversation status: {current}")

    if current == "ended":
        raise ConversationEnded()

    if action == "send":
        return current

    if action == "snooze":
        return "snoozed"

    if action == "resume":
        return "active"

    if action == "end":
        return "ended"

    raise InvalidInput(f"Unknown conversation action: {action}")
