"""
Run GI Triage Service
=====================

Start: python -m triage_service.run_server
Stop:  Ctrl+C

Loads:
- Symptom catalog from KNOWLEDGE_DIR (bundled knowledge/ by default)
- Critical emergency phrases from safety_config
"""

import uvicorn

from .app import app, catalog_provider
from .config import settings


def main():
    stats = catalog_provider.snapshot.stats()
    print("=" * 60)
    print("🏥 GI Triage Service - Starting Server")
    print("=" * 60)
    print(f"📊 Catalog: {stats['diseases']} diseases, {stats['symptoms']} symptoms, {stats['relations']} relations")
    print(f"🔗 API Docs: http://localhost:{settings.PORT}/docs")
    print("=" * 60)

    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
