# storefront/client/local_history.py
from datetime import datetime, timezone
from typing import Any, Dict, List

from storefront.client.gateway import TokenStore

RECENTLY_VIEWED_KEY = "recently_viewed"
REVIEWS_KEY = "product_reviews"
RECENTLY_VIEWED_LIMIT = 30


class LocalHistory:
    """Ostatnio ogladane produkty i szkice recenzji; tylko lokalnie, serwer ich nie zna."""

    def __init__(self, storage: TokenStore):
        self.storage = storage

    def recently_viewed(self) -> List[Dict[str, Any]]:
        return self.storage.get(RECENTLY_VIEWED_KEY, [])

    def record_view(self, product_id: int, name: str = "") -> List[Dict[str, Any]]:
        entries = self.recently_viewed()
        # juz obecny produkt zostaje na swoim miejscu
        if any(str(e.get("id")) == str(product_id) for e in entries):
            return entries

        entries = [{"id": product_id, "name": name}, *entries][:RECENTLY_VIEWED_LIMIT]
        self.storage.set(RECENTLY_VIEWED_KEY, entries)
        return entries

    def reviews(self, product_id: int) -> List[Dict[str, Any]]:
        return self.storage.get(REVIEWS_KEY, {}).get(str(product_id), [])

    def save_review(self, product_id: int, rating: int, comment: str = "", author: str | None = None) -> Dict[str, Any]:
        if not 1 <= rating <= 5:
            raise ValueError("Rating must be between 1 and 5")

        review = {
            "rating": rating,
            "comment": comment,
            "author": author,
            "date": datetime.now(timezone.utc).isoformat(),
        }
        all_reviews = self.storage.get(REVIEWS_KEY, {})
        all_reviews.setdefault(str(product_id), []).append(review)
        self.storage.set(REVIEWS_KEY, all_reviews)
        return review
