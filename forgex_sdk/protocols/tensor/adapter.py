"""
Tensor Adapter

NFT collection stats, listings and bids through the Tensor GraphQL API.
Prices come back in lamports and are converted to SOL.
"""

import logging
from typing import Any, Dict, List, Optional

from ...errors import ConfigurationError
from ...types.common import LAMPORTS_PER_SOL
from ...types.market import NftCollection
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, remap, remap_many

logger = logging.getLogger(__name__)

COLLECTION_FIELDS = (
    Field("id", "id", cast=str),
    Field("slug", "slug", cast=str),
    Field("name", "name", cast=str),
    Field("image_uri", "imageUri", cast=str),
    Field("floor_price", "statsV2.floorPrice", divide=LAMPORTS_PER_SOL),
    Field("num_listed", "statsV2.numListed", cast=int),
    Field("num_mints", "statsV2.numMints", cast=int),
    Field("volume_24h", "statsV2.volume24h", divide=LAMPORTS_PER_SOL),
)

LISTING_FIELDS = (
    Field("mint", "mint", cast=str),
    Field("seller", "seller", cast=str),
    Field("price", "tx.grossAmount", divide=LAMPORTS_PER_SOL),
    Field("currency", "tx.grossAmountUnit", cast=str),
)

_COLLECTION_SELECTION = """
    id
    slug
    name
    imageUri
    statsV2 {
      floorPrice
      numListed
      numMints
      volume24h
    }
"""

COLLECTIONS_QUERY = """
query GetCollections($limit: Int!, $sortBy: String) {
  instrumentTV2(limit: $limit, sortBy: $sortBy) {%s}
}
""" % _COLLECTION_SELECTION

COLLECTION_QUERY = """
query GetCollection($slug: String!) {
  instrumentTV2(slug: $slug) {%s}
}
""" % _COLLECTION_SELECTION

LISTINGS_QUERY = """
query GetListings($slug: String!, $limit: Int!) {
  activeListingsV2(slug: $slug, limit: $limit) {
    txs {
      mint
      tx {
        grossAmount
        grossAmountUnit
      }
      seller
    }
  }
}
"""

BID_ASK_QUERY = """
query GetBidAsk($slug: String!) {
  instrumentTV2(slug: $slug) {
    statsV2 {
      floorPrice
      highestBid
    }
  }
}
"""

SORT_FIELDS = {
    "24h": "statsV2.volume24h:desc",
    "7d": "statsV2.volume7d:desc",
    "all": "statsV2.volumeAll:desc",
}


class TensorAdapter(ProviderAdapter):
    """
    Tensor GraphQL adapter (API key required)

    Usage:
        top = await client.tensor.get_collections(period="24h", limit=5)
        floor = await client.tensor.get_floor_price("madlads")
    """

    name = "tensor"
    default_base_url = "https://api.tensor.so/graphql"
    requires_api_key = True

    def _headers(self) -> Dict[str, str]:
        return {"X-TENSOR-API-KEY": self._api_key}

    @upstream_call("get_collections")
    async def get_collections(self, period: str = "24h", limit: int = 10) -> List[NftCollection]:
        """Collections ranked by trading volume over period ("24h", "7d", "all")"""
        if period not in SORT_FIELDS:
            raise ConfigurationError.invalid("period", f"must be one of {sorted(SORT_FIELDS)}")
        if not 1 <= limit <= 100:
            raise ConfigurationError.invalid("limit", "must be within 1..100")
        data = await self._graphql(COLLECTIONS_QUERY, {"limit": limit, "sortBy": SORT_FIELDS[period]})
        return remap_many(data.get("instrumentTV2"), COLLECTION_FIELDS, NftCollection)

    @upstream_call("get_collection")
    async def get_collection(self, slug: str) -> Optional[NftCollection]:
        data = await self._graphql(COLLECTION_QUERY, {"slug": slug})
        items = data.get("instrumentTV2") or []
        return remap(items[0], COLLECTION_FIELDS, NftCollection) if items else None

    @upstream_call("get_floor_price")
    async def get_floor_price(self, slug: str) -> Optional[float]:
        """Floor price in SOL, None when the collection is unknown or unlisted"""
        collection = await self.get_collection(slug)
        return collection.floor_price if collection else None

    @upstream_call("get_active_listings")
    async def get_active_listings(self, slug: str, limit: int = 20) -> List[Dict[str, Any]]:
        data = await self._graphql(LISTINGS_QUERY, {"slug": slug, "limit": limit})
        return remap_many((data.get("activeListingsV2") or {}).get("txs"), LISTING_FIELDS)

    @upstream_call("get_best_bid_ask")
    async def get_best_bid_ask(self, slug: str) -> Dict[str, Optional[float]]:
        """Highest bid and floor ask in SOL"""
        data = await self._graphql(BID_ASK_QUERY, {"slug": slug})
        items = data.get("instrumentTV2") or []
        stats = items[0] if items else {}
        return remap(stats, (
            Field("bid", "statsV2.highestBid", divide=LAMPORTS_PER_SOL),
            Field("ask", "statsV2.floorPrice", divide=LAMPORTS_PER_SOL),
        ))

    async def health_probe(self):
        return await self.get_collections(limit=1)
