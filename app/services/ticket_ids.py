import uuid

SHORT_PREFIX = "THM-"


def short_ticket_id_for(ticket_id: str) -> str:
    """THM- plus the first UUID segment (8 lowercase hex chars). Not unique on its own."""
    return SHORT_PREFIX + ticket_id.split("-")[0].lower()


def generate_ticket_ids() -> tuple[str, str]:
    ticket_id = str(uuid.uuid4())
    return ticket_id, short_ticket_id_for(ticket_id)
