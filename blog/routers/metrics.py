from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from blog.cache import cache
from blog.database import get_db
from blog.models import Article, Comment, User

router = APIRouter(prefix="/api/metricas", tags=["metrics"])


@router.get("")
async def get_metrics(db: AsyncSession = Depends(get_db)):
    total_articles = (await db.execute(select(func.count()).select_from(Article))).scalar_one()
    total_comments = (await db.execute(select(func.count()).select_from(Comment))).scalar_one()
    total_users = (await db.execute(select(func.count()).select_from(User))).scalar_one()

    avg_comments = total_comments / total_articles if total_articles > 0 else 0

    return {
        "success": True,
        "metricas": {
            "articulos": total_articles,
            "comentarios": total_comments,
            "usuarios": total_users,
            "comentarios_por_articulo": round(avg_comments, 2),
            "cache": cache.stats,
        },
    }
