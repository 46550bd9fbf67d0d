from fastapi import APIRouter, Depends, HTTPException, Query, status
from app.config import BLOG_PAGE_SIZE
from app.deps.identity import get_firestore_db
from app.services.blog_service import get_post, list_posts

router = APIRouter(prefix="/blog", tags=["blog"])

@router.get("", status_code=status.HTTP_200_OK)
def blog_index(limit: int = Query(BLOG_PAGE_SIZE, ge=1, le=100), db=Depends(get_firestore_db)):
    posts = list_posts(db, limit)
    return {"ok": True, "count": len(posts), "posts": posts}

@router.get("/{post_id}", status_code=status.HTTP_200_OK)
def blog_detail(post_id: str, db=Depends(get_firestore_db)):
    post = get_post(db, post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return {"ok": True, "post": post}
