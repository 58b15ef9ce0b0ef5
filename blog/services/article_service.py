"""
Article service — business logic for articles.

Design notes
------------
- List and detail reads go through the Redis cache-aside layer.  The list
  cache is keyed by category only; the free-text search is applied in
  memory on top of the cached list.
- Tags are normalized on the way in (``ArticleCreate``) and again on the
  way out, so rows written by older clients in another tag format still
  come back as a list.
- Service functions flush but do not commit; the transaction boundary is
  owned by the ``get_db`` dependency in the router layer.  Cache entries
  are dropped only after that commit (``after_commit``), so a read that
  runs before the commit cannot leave the pre-write row cached.
"""
import logging
from functools import partial

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from blog.cache import cache
from blog.categories import ALL_CATEGORIES, Category
from blog.config import settings
from blog.database import after_commit
from blog.models import Article
from blog.schemas import ArticleCreate, ArticleUpdate
from blog.tags import normalize_tags

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _article_to_dict(article: Article) -> dict:
    """Serialise an Article ORM instance using the public field names."""
    return {
        "id": article.id,
        "titulo": article.title,
        "contenido": article.content,
        "autor": article.author,
        "categoria": Category(article.category).value,
        "tags": normalize_tags(article.tags),
        "imageUrl": article.image_url,
        "createdAt": article.created_at.isoformat() if article.created_at else None,
        "updatedAt": article.updated_at.isoformat() if article.updated_at else None,
    }


def _matches(article: dict, term: str) -> bool:
    term = term.lower()
    fields = (article["titulo"], article["contenido"], article["autor"], article["categoria"])
    if any(term in field.lower() for field in fields):
        return True
    return any(term in str(tag).lower() for tag in article["tags"])


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

def get_categories() -> list[str]:
    return Category.values()


async def get_articles(
    db: AsyncSession,
    category: str | None = None,
    search: str | None = None,
) -> list[dict]:
    """
    Return all articles, newest first.

    *category* restricts the result to one category; ``None``, ``"All"``
    and ``"Todas"`` mean no restriction and an unknown name matches
    nothing.  *search* keeps only articles whose title, content, author,
    category or tags contain the term (case-insensitive).
    """
    if category in ALL_CATEGORIES:
        category = None

    wanted: Category | None = None
    if category:
        wanted = Category.parse(category)
        if wanted is None:
            return []

    cache_key = cache.article_list_key(wanted.value if wanted else None)
    articles = await cache.get(cache_key)
    if articles is None:
        q = select(Article).order_by(Article.created_at.desc(), Article.id.desc())
        if wanted is not None:
            q = q.where(Article.category == wanted)
        result = await db.execute(q)
        articles = [_article_to_dict(a) for a in result.scalars().all()]
        await cache.set(cache_key, articles, ttl=settings.CACHE_TTL_LIST)

    if search and search.strip():
        term = search.strip()
        articles = [a for a in articles if _matches(a, term)]
    return articles


async def get_article(db: AsyncSession, article_id: int) -> dict | None:
    """Return the article dict for *article_id*, or None when it does not exist."""
    cache_key = cache.article_detail_key(article_id)
    cached = await cache.get(cache_key)
    if cached:
        return cached

    result = await db.execute(select(Article).where(Article.id == article_id))
    article = result.scalar_one_or_none()
    if article is None:
        return None

    data = _article_to_dict(article)
    await cache.set(cache_key, data, ttl=settings.CACHE_TTL_DETAIL)
    return data


async def create_article(
    db: AsyncSession, data: ArticleCreate, image_url: str | None = None
) -> dict:
    """
    Insert a new article and return it with its assigned id.

    *image_url* is the public path of an image already saved by
    ``blog.uploads.save_image``.
    """
    article = Article(
        title=data.title,
        content=data.content,
        author=data.author,
        category=data.category,
        tags=data.tags,
        image_url=image_url,
    )
    db.add(article)
    await db.flush()
    await db.refresh(article)

    logger.info("Created article id=%s category=%r", article.id, article.category.value)
    after_commit(db, cache.invalidate_article)
    return _article_to_dict(article)


async def update_article(
    db: AsyncSession, article_id: int, data: ArticleUpdate
) -> dict | None:
    """
    Partially update an article and return the stored result.

    Returns None when the article does not exist.  Fields that are missing
    (or blank) keep their value, an unknown category keeps the current one,
    and omitted or blank tags are re-normalized from what is stored.
    """
    q = select(Article).where(Article.id == article_id).with_for_update()
    result = await db.execute(q)
    article = result.scalar_one_or_none()
    if article is None:
        return None

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    tags = changes.pop("tags", None)

    for field, value in changes.items():
        setattr(article, field, value)
    article.tags = normalize_tags(tags if tags is not None else article.tags)

    await db.flush()
    await db.refresh(article)

    after_commit(db, partial(cache.invalidate_article, article_id))
    return _article_to_dict(article)


async def delete_article(db: AsyncSession, article_id: int) -> bool:
    """
    Delete the article identified by *article_id* together with its
    comments (``ON DELETE CASCADE``).

    Returns True on success, False when the article does not exist.
    """
    result = await db.execute(delete(Article).where(Article.id == article_id))
    if result.rowcount == 0:
        return False

    logger.info("Deleted article id=%s", article_id)
    after_commit(db, partial(cache.invalidate_article, article_id))
    return True
