"""
Comment service — comments always belong to exactly one article.

A comment can only be created for an article that exists; deleting the
article removes its comments at the database level.
"""
import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from blog.models import Article, Comment
from blog.schemas import CommentCreate

logger = logging.getLogger(__name__)


def _comment_to_dict(comment: Comment) -> dict:
    return {
        "id": comment.id,
        "articulo_id": comment.article_id,
        "nombre": comment.author_name,
        "comentario": comment.content,
        "createdAt": comment.created_at.isoformat() if comment.created_at else None,
    }


async def get_comments(db: AsyncSession, article_id: int) -> list[dict]:
    """
    Return the comments of *article_id*, newest first.

    An unknown article simply has no comments.
    """
    q = (
        select(Comment)
        .where(Comment.article_id == article_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    result = await db.execute(q)
    return [_comment_to_dict(c) for c in result.scalars().all()]


async def add_comment(db: AsyncSession, data: CommentCreate) -> dict | None:
    """
    Add a comment to the article named in *data*.

    Returns the serialised comment, or None when the article does not
    exist (nothing is written in that case).
    """
    result = await db.execute(select(Article.id).where(Article.id == data.article_id))
    if result.scalar_one_or_none() is None:
        return None

    comment = Comment(
        article_id=data.article_id,
        author_name=data.author_name,
        content=data.content,
    )
    db.add(comment)
    await db.flush()
    await db.refresh(comment)

    logger.info("Added comment id=%s to article id=%s", comment.id, comment.article_id)
    return _comment_to_dict(comment)


async def delete_comment(db: AsyncSession, comment_id: int) -> bool:
    """Delete one comment.  Returns False when it does not exist."""
    result = await db.execute(delete(Comment).where(Comment.id == comment_id))
    if result.rowcount == 0:
        return False
    logger.info("Deleted comment id=%s", comment_id)
    return True
