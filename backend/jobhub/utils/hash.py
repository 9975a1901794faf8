from __future__ import annotations
import hashlib


def job_fallback_hash(apply_url: str, title: str, employer: str) -> str:
    raw = f"{apply_url.strip().lower()}|{title.strip().lower()}|{employer.strip().lower()}"
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()


def dedupe_key(title: str, employer: str, apply_url: str) -> tuple[str, str, str]:
    url = apply_url.strip().lower()
    if url == "#":
        url = ""
    return (" ".join(title.lower().split()), " ".join(employer.lower().split()), url)
