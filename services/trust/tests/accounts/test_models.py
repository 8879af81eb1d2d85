import pytest
from sqlalchemy.orm import configure_mappers

import app.notifications.models  # noqa: F401
import app.reports.models  # noqa: F401
import app.social_graph.models  # noqa: F401
from app.accounts import service as accounts_svc
from app.accounts.constants import ConductAction
from app.accounts.models import Account, ConductEntry
from tests.conftest import T0


def test_mappers_configure() -> None:
    configure_mappers()

    conduct = Account.conduct.property
    assert conduct.mapper.class_ is ConductEntry
    assert [c.name for c in conduct.local_remote_pairs[0]] == ["id", "account_id"]


@pytest.mark.asyncio
async def test_moderator_link_is_separate_from_owner(db_session, make_account) -> None:
    user = await make_account("singer")
    moderator = await make_account("mod")

    entry = accounts_svc.record_conduct(
        db_session, user, ConductAction.WARNING, moderator_id=moderator.id, now=T0
    )
    await db_session.flush()

    history = await accounts_svc.get_conduct_history(db_session, user.id)
    assert [e.id for e in history] == [entry.id]
    assert await accounts_svc.get_conduct_history(db_session, moderator.id) == []
    assert entry.seq is not None
