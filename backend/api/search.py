"""Search API Routes

Query parameters grouped in a model. FastAPI expands SearchQuery into flat
query parameters and does not publish it as a component schema.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from schemarules import Validator
from schemarules.logging import api_logger

log = api_logger()

router = APIRouter()


class SearchQuery(BaseModel):
    query: Optional[str] = None
    page: int = 1
    size: int = 20
    order: str = "asc"


class SearchResult(BaseModel):
    items: list[str]
    page: int
    size: int


class SearchQueryValidator(Validator[SearchQuery]):
    def __init__(self):
        super().__init__()
        self.rule_for("query").not_empty().maximum_length(200)
        self.rule_for("page").greater_than(0)
        self.rule_for("size").inclusive_between(1, 100)
        self.rule_for("order").is_in_enum(["asc", "desc"])


VALIDATORS = (SearchQueryValidator(),)

_CATALOG = ("morphology", "etymology", "phonology", "syntax", "semantics")


@router.get("", response_model=SearchResult)
async def search(params: Annotated[SearchQuery, Query()]):
    """Search the catalog."""
    matches = sorted(item for item in _CATALOG if not params.query or params.query.lower() in item)
    if params.order == "desc":
        matches.reverse()
    start = (params.page - 1) * params.size
    log.debug("search", query=params.query, hits=len(matches))
    return SearchResult(items=matches[start:start + params.size], page=params.page, size=params.size)
