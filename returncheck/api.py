"""FastAPI service that runs the return value checks over a repo archive."""

from __future__ import annotations

import argparse
import zipfile
from pathlib import Path
from tempfile import TemporaryDirectory
from urllib.parse import urlparse

import httpx
from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse

from .config import ConfigError, resolve_flags
from .pipeline import check_root


app = FastAPI(title="Return Value Check API")

GITHUB_HOSTS = {"github.com", "www.github.com"}
ARCHIVE_URL = "https://github.com/{owner}/{repo}/archive/refs/heads/{branch}.zip"
DEFAULT_BRANCHES = ["main", "master"]


def _unpack_archive(archive_bytes: bytes, workdir: Path) -> Path:
    if not archive_bytes:
        raise HTTPException(status_code=400, detail="Empty archive.")

    archive_path = workdir / "upload.zip"
    archive_path.write_bytes(archive_bytes)
    target = workdir / "src"
    try:
        with zipfile.ZipFile(archive_path) as archive:
            archive.extractall(target)
    except zipfile.BadZipFile as exc:
        raise HTTPException(status_code=400, detail="Invalid zip archive.") from exc

    # GitHub archives wrap everything in a single top-level directory.
    entries = list(target.iterdir())
    if len(entries) == 1 and entries[0].is_dir():
        return entries[0]
    return target


def archive_candidates(repo_url: str) -> list[str]:
    """Download URLs to try, in order, for a GitHub repo or direct zip link."""
    parsed = urlparse(repo_url)
    if parsed.scheme not in {"http", "https"}:
        raise HTTPException(status_code=400, detail="repo_url must be http/https.")
    if parsed.path.lower().endswith(".zip"):
        return [repo_url]
    if parsed.netloc.lower() not in GITHUB_HOSTS:
        raise HTTPException(
            status_code=400,
            detail="repo_url must be a GitHub repo URL or direct zip link.",
        )

    parts = [part for part in parsed.path.split("/") if part]
    if len(parts) < 2:
        raise HTTPException(status_code=400, detail="repo_url must be a repo or zip link.")
    owner, repo = parts[0], parts[1].removesuffix(".git")

    branches = [parts[3]] if len(parts) > 3 and parts[2] == "tree" else DEFAULT_BRANCHES
    return [ARCHIVE_URL.format(owner=owner, repo=repo, branch=branch) for branch in branches]


def _download_archive(repo_url: str) -> bytes:
    candidates = archive_candidates(repo_url)
    for url in candidates:
        try:
            response = httpx.get(url, timeout=60.0, follow_redirects=True)
        except httpx.RequestError as exc:
            raise HTTPException(status_code=502, detail=f"Failed to reach {url}.") from exc
        if response.status_code == 200:
            return response.content
    raise HTTPException(
        status_code=400,
        detail=f"Failed to download repo zip. Tried: {', '.join(candidates)}",
    )


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/check")
def check_repo(
    file: UploadFile | None = File(default=None),
    repo_url: str | None = Query(default=None),
    custom_annotations: str | None = Query(default=None),
    exclude_annotations: str | None = Query(default=None),
    checks: str | None = Query(default=None),
    max_files: int | None = None,
) -> JSONResponse:
    if file is None and not repo_url:
        raise HTTPException(
            status_code=400, detail="Provide either a zip file upload or repo_url."
        )

    with TemporaryDirectory() as temp_dir:
        if repo_url:
            archive_bytes = _download_archive(repo_url)
        else:
            if not file.filename or not file.filename.lower().endswith(".zip"):
                raise HTTPException(status_code=400, detail="Upload a .zip archive.")
            archive_bytes = file.file.read()
        root = _unpack_archive(archive_bytes, Path(temp_dir))

        try:
            flags = resolve_flags(
                root,
                custom_annotations=custom_annotations,
                exclude_annotations=exclude_annotations,
                environ={},
            )
            selected = [name.strip() for name in checks.split(",")] if checks else None
            result = check_root(root, flags=flags, checks=selected, max_files=max_files)
        except ConfigError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        payload = result.to_dict()
        payload["root"] = root.name
        return JSONResponse(content=payload)


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the return value check API server")
    parser.add_argument("--host", default="127.0.0.1", help="Bind host")
    parser.add_argument("--port", type=int, default=9000, help="Bind port")
    args = parser.parse_args()

    import uvicorn

    uvicorn.run("returncheck.api:app", host=args.host, port=args.port, reload=False)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
