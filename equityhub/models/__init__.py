"""SQLModel table models — import here so metadata is populated."""

from equityhub.models.company import Company  # noqa: F401
from equityhub.models.round import Round, RoundInvestor  # noqa: F401
from equityhub.models.shareholder import ShareAccount, Shareholder  # noqa: F401
from equityhub.models.user import UserAccount, UserProfile  # noqa: F401
