#campus_issues/services/storage.py
import base64
from datetime import datetime, timezone

import requests
from campus_issues.core.config import settings

class StorageError(Exception):
    pass

def upload_image(data: bytes, content_type: str, path: str) -> str:
    """Uploads to Supabase Storage via REST; returns public URL (bucket must be public)."""
    if not (settings.supabase_url and settings.supabase_service_role):
        # no storage configured: inline the image so local setups still round-trip
        b64 = base64.b64encode(data).decode("utf-8")
        return f"data:{content_type};base64,{b64}"
    base = settings.supabase_url.rstrip("/")
    bucket = settings.supabase_bucket
    url = f"{base}/storage/v1/object/{bucket}/{path}"
    try:
        r = requests.post(url, headers={
            "Authorization": f"Bearer {settings.supabase_service_role}",
            "Content-Type": content_type,
            "x-upsert": "true",
        }, data=data, timeout=30)
        r.raise_for_status()
    except requests.RequestException as e:
        raise StorageError(f"Upload of {path} failed: {e}") from e
    # public URL pattern:
    return f"{base}/storage/v1/object/public/{bucket}/{path}"

def make_object_key(user_id: int, filename: str, submitted_at: datetime | None = None) -> str:
    """``<user id>/<submission timestamp in ms>.<ext>``"""
    when = submitted_at or datetime.now(timezone.utc)
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "jpg"
    return f"{user_id}/{int(when.timestamp() * 1000)}.{ext or 'jpg'}"
