from typing import Dict, List, Optional
from google.cloud import firestore
from app.config import BLOG_COLLECTION

def list_posts(db, limit: int) -> List[Dict]:
    """
    Devuelve los posts más recientes primero. Cada doc:
      { title, summary, body, author, createdAt, updatedAt }
    """
    docs = (
        db.collection(BLOG_COLLECTION)
        .order_by("createdAt", direction=firestore.Query.DESCENDING)
        .limit(limit)
        .stream()
    )
    out = []
    for d in docs:
        data = d.to_dict() or {}
        data["id"] = d.id
        out.append(data)
    return out

def get_post(db, post_id: str) -> Optional[Dict]:
    if not post_id:
        return None
    doc = db.collection(BLOG_COLLECTION).document(post_id).get()
    if not doc.exists:
        return None
    data = doc.to_dict() or {}
    data["id"] = doc.id
    return data
