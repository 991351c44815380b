from datetime import date
from decimal import Decimal

from fx_historic import FxHistoric, RateQuery, RateRecord

print(FxHistoric.__version__)  # 0.1.0

fx = FxHistoric()

# A feed collaborator delivers the full window of parsed rows (USD based)
fx.load_records(
    "H10",
    [
        RateRecord(rate_date=date(2024, 3, 1), currency="EUR", rate=Decimal("0.90")),
        RateRecord(rate_date=date(2024, 3, 1), currency="JPY", rate=Decimal("150.0")),
        RateRecord(rate_date=date(2024, 3, 4), currency="EUR", rate=Decimal("0.92")),
        RateRecord(rate_date=date(2024, 3, 4), currency="JPY", rate=Decimal("149.5")),
    ],
)
print(fx.load_state)

# Latest cached day
print(fx.get_rate("USD", "EUR"))

# Inverted rate on a specific day
print(fx.get_rate("EUR", "USD", date(2024, 3, 1)).factor)  # 1.111111111111111

# Cross rate through USD, falling back over the weekend to Friday
rate = fx.get_rate("EUR", "JPY", date(2024, 3, 3), lookback_days=3)
print(rate.as_of, rate.factor, rate.provenance)

# Explicit candidate dates are tried in the given order
print(fx.get_rate(RateQuery("USD", "JPY", (date(2024, 3, 2), date(2024, 3, 1)))))

# Persisted rows can be replayed through the archive feed
# from fx_historic import ArchiveFeed, FeedRefresher, SQLiteManager
# with SQLiteManager("rates.db") as manager:
#     FeedRefresher(fx, ArchiveFeed(manager)).refresh()
