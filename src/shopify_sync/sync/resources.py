"""Typed Shopify resources and per-kind field policies.

Each resource kind synced to disk has:

- a pydantic schema for the remote document (unknown fields are kept,
  since Shopify adds fields over time and local files mirror them),
- a ``KindPolicy`` naming its identity field and the fields stripped
  before persisting or comparing.

``RemoteItem`` is the kind-agnostic view the reconciler works on.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel


class ResourceKind(str, Enum):
    """Resource kinds that can be pulled and pushed."""

    ASSET = "asset"
    REDIRECT = "redirect"
    SCRIPT_TAG = "script_tag"
    PAGE = "page"
    BLOG_ARTICLE = "blog_article"


# Server-assigned identity fields never persisted for pages/articles.
IDENTITY_FIELDS = frozenset({"id", "handle", "shop_id", "admin_graphql_api_id"})

# Timestamps that change on every save and are ignored when comparing.
VOLATILE_FIELDS = frozenset(
    {"published_at", "created_at", "updated_at", "deleted_at"}
)


@dataclass(frozen=True, slots=True)
class KindPolicy:
    """Field policy for one resource kind.

    Attributes:
        kind: The resource kind.
        identity_field: Field holding the unique key within the kind.
        ignore_fields: Fields dropped before writing a local document.
        compare_ignore_fields: Fields dropped before comparing documents.
    """

    kind: ResourceKind
    identity_field: str
    ignore_fields: frozenset[str] = frozenset()
    compare_ignore_fields: frozenset[str] = frozenset()


POLICIES: dict[ResourceKind, KindPolicy] = {
    ResourceKind.ASSET: KindPolicy(ResourceKind.ASSET, "key"),
    ResourceKind.REDIRECT: KindPolicy(
        ResourceKind.REDIRECT,
        "path",
        ignore_fields=frozenset({"id"}),
        compare_ignore_fields=frozenset({"id"}),
    ),
    ResourceKind.SCRIPT_TAG: KindPolicy(
        ResourceKind.SCRIPT_TAG,
        "src",
        ignore_fields=frozenset({"id"}),
        compare_ignore_fields=frozenset({"id"}),
    ),
    ResourceKind.PAGE: KindPolicy(
        ResourceKind.PAGE,
        "handle",
        ignore_fields=IDENTITY_FIELDS,
        compare_ignore_fields=IDENTITY_FIELDS | VOLATILE_FIELDS,
    ),
    ResourceKind.BLOG_ARTICLE: KindPolicy(
        ResourceKind.BLOG_ARTICLE,
        "handle",
        ignore_fields=IDENTITY_FIELDS,
        compare_ignore_fields=IDENTITY_FIELDS | VOLATILE_FIELDS,
    ),
}


# ---------------------------------------------------------------------------
# Remote schemas
# ---------------------------------------------------------------------------


class ShopifyResource(BaseModel):
    """Base for remote documents; extra fields are preserved."""

    id: int | None = None

    model_config = {"frozen": True, "extra": "allow"}

    def document(self, exclude: frozenset[str] | set[str] = frozenset()) -> dict[str, Any]:
        """Fields the remote actually sent, minus *exclude*."""
        return self.model_dump(exclude=set(exclude), exclude_unset=True)


class Theme(ShopifyResource):
    name: str
    role: str = "unpublished"

    @property
    def is_main(self) -> bool:
        return self.role == "main"


class Asset(ShopifyResource):
    key: str
    checksum: str | None = None
    size: int | None = None
    updated_at: str | None = None
    public_url: str | None = None
    content_type: str | None = None
    value: str | None = None
    attachment: str | None = None


class Redirect(ShopifyResource):
    path: str
    target: str


class ScriptTag(ShopifyResource):
    src: str
    event: str = "onload"
    display_scope: str = "all"


class Blog(ShopifyResource):
    handle: str
    title: str | None = None


class Page(ShopifyResource):
    handle: str
    title: str | None = None
    body_html: str | None = None
    published_at: str | None = None

    @property
    def is_published(self) -> bool:
        return bool(self.published_at)


class BlogArticle(Page):
    blog_id: int | None = None


# ---------------------------------------------------------------------------
# Reconciler view
# ---------------------------------------------------------------------------


class RemoteItem(BaseModel):
    """A remote resource keyed by its identity within one kind.

    Attributes:
        id: Server-assigned id, when the kind has one.
        key: Identity key (asset key, redirect path, page handle, ...).
        payload: The document to persist or compare.
        checksum: Remote MD5, when reported.
        size: Remote size in bytes, when reported.
        updated_at: Remote modification timestamp, when reported.
    """

    id: int | None = None
    key: str
    payload: dict[str, Any] = {}
    checksum: str | None = None
    size: int | None = None
    updated_at: str | None = None

    model_config = {"frozen": True}


def remote_item(resource: ShopifyResource, kind: ResourceKind) -> RemoteItem:
    """Wrap a typed resource as a ``RemoteItem`` keyed per *kind*'s policy."""
    policy = POLICIES[kind]
    return RemoteItem(
        id=resource.id,
        key=getattr(resource, policy.identity_field),
        payload=resource.document(),
        checksum=getattr(resource, "checksum", None),
        size=getattr(resource, "size", None),
        updated_at=getattr(resource, "updated_at", None),
    )
