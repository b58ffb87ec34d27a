import re
import uuid

from app.services.ticket_ids import generate_ticket_ids, short_ticket_id_for

SHORT_RE = re.compile(r"^THM-[0-9a-f]{8}$")


def test_generated_ids_are_well_formed():
    ticket_id, short_id = generate_ticket_ids()
    assert str(uuid.UUID(ticket_id)) == ticket_id
    assert SHORT_RE.match(short_id)
    assert short_id == "THM-" + ticket_id[:8]


def test_short_id_is_deterministic():
    ticket_id = "0f1e2d3c-aaaa-4bbb-8ccc-123456789abc"
    assert short_ticket_id_for(ticket_id) == "THM-0f1e2d3c"
    assert short_ticket_id_for(ticket_id) == short_ticket_id_for(ticket_id)


def test_ticket_ids_do_not_repeat():
    ids = {generate_ticket_ids()[0] for _ in range(1000)}
    assert len(ids) == 1000
