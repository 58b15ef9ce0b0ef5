from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from blog.database import get_db
from blog.schemas import CommentCreate
from blog.services import comment_service

router = APIRouter(prefix="/api/comentarios", tags=["comments"])


@router.get("/{article_id}")
async def list_comments(article_id: int, db: AsyncSession = Depends(get_db)):
    comments = await comment_service.get_comments(db, article_id)
    return {"success": True, "comentarios": comments}


@router.post("", status_code=201)
async def add_comment(data: CommentCreate, db: AsyncSession = Depends(get_db)):
    comment = await comment_service.add_comment(db, data)
    if not comment:
        raise HTTPException(status_code=404, detail="Article not found")
    return {"success": True, "message": "Comment created", "comentario": comment}


@router.delete("/{comment_id}")
async def delete_comment(comment_id: int, db: AsyncSession = Depends(get_db)):
    deleted = await comment_service.delete_comment(db, comment_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Comment not found")
    return {"success": True, "message": "Comment deleted"}
