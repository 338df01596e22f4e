# Overview: Shared request parsing for listing and mutation routes.

from __future__ import annotations

from flask import current_app, jsonify, request

from numberflow.services.listing import ASCENDING, SORT_DIRECTIONS, ListingQuery, contains, exact
from numberflow.validation import ValidationError, require_json_object


def json_body() -> dict:
    return require_json_object(request.get_json(silent=True))


def listing_query(filters: dict[str, tuple[str, str]], sortable: set[str], default_sort: str | None = None) -> ListingQuery:
    """
    Build a ListingQuery from query parameters.

    `filters` maps a query parameter to (field, mode) where mode is
    "exact" or "contains". Common parameters:
    - page (1-indexed), page_size
    - sort, direction (ascending|descending)
    """
    errors = {}

    predicates = []
    for param, (field_name, mode) in filters.items():
        value = request.args.get(param)
        if value is None:
            continue
        predicates.append(contains(field_name, value) if mode == "contains" else exact(field_name, value))

    page = request.args.get("page", 1, type=int)
    page_size = request.args.get("page_size", current_app.config["DEFAULT_PAGE_SIZE"], type=int)
    if page_size < 1:
        page_size = 1
    if page_size > current_app.config["MAX_PAGE_SIZE"]:
        page_size = current_app.config["MAX_PAGE_SIZE"]

    sort_key = request.args.get("sort") or default_sort
    if sort_key and sort_key not in sortable:
        errors["sort"] = f"sort must be one of: {', '.join(sorted(sortable))}"

    direction = request.args.get("direction", ASCENDING)
    if direction not in SORT_DIRECTIONS:
        errors["direction"] = f"direction must be one of: {', '.join(SORT_DIRECTIONS)}"

    if errors:
        raise ValidationError(errors)

    return ListingQuery(
        predicates=predicates,
        sort_key=sort_key,
        sort_direction=direction,
        page=page,
        page_size=page_size,
    )


def listing_response(records, query: ListingQuery):
    """Filter, sort and page ORM rows, then serialize the page."""
    result = query.apply(records)
    result["items"] = [r.to_dict() for r in result["items"]]
    return jsonify(result)


def mutation_response(notification, status: int = 200, **payload):
    body = dict(payload)
    body["notification"] = notification.to_dict()
    return jsonify(body), status
