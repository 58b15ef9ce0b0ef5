from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from blog.database import get_db
from blog.schemas import ArticleCreate, ArticleUpdate
from blog.services import article_service
from blog.uploads import save_image

router = APIRouter(prefix="/api/articulos", tags=["articles"])

NOT_FOUND = "Article not found"


@router.get("/categorias")
async def list_categories():
    return {"success": True, "categorias": article_service.get_categories()}


@router.get("")
async def list_articles(
    categoria: str | None = Query(None, description="Category name, or 'All' / 'Todas'."),
    q: str | None = Query(None, description="Free-text search over title, content, author, category and tags."),
    db: AsyncSession = Depends(get_db),
):
    articles = await article_service.get_articles(db, category=categoria, search=q)
    return {"success": True, "articulos": articles}


@router.get("/{article_id}")
async def get_article(article_id: int, db: AsyncSession = Depends(get_db)):
    article = await article_service.get_article(db, article_id)
    if not article:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"success": True, "articulo": article}


@router.post("", status_code=201)
async def create_article(
    titulo: str | None = Form(None),
    contenido: str | None = Form(None),
    autor: str | None = Form(None),
    categoria: str | None = Form(None),
    tags: str | None = Form(None),
    imagen: UploadFile | None = File(None),
    db: AsyncSession = Depends(get_db),
):
    fields = {
        "titulo": titulo,
        "contenido": contenido,
        "autor": autor,
        "categoria": categoria,
        "tags": tags,
    }
    # Validate before touching the filesystem.
    data = ArticleCreate.model_validate({k: v for k, v in fields.items() if v is not None})

    image_url = None
    if imagen is not None and imagen.filename:
        image_url = await save_image(imagen)

    article = await article_service.create_article(db, data, image_url=image_url)
    return {"success": True, "message": "Article created", "articulo": article}


@router.put("/{article_id}")
async def update_article(article_id: int, data: ArticleUpdate, db: AsyncSession = Depends(get_db)):
    article = await article_service.update_article(db, article_id, data)
    if not article:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"success": True, "message": "Article updated", "articulo": article}


@router.delete("/{article_id}")
async def delete_article(article_id: int, db: AsyncSession = Depends(get_db)):
    deleted = await article_service.delete_article(db, article_id)
    if not deleted:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"success": True, "message": "Article deleted"}
