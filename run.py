import sys
import os
import logging
import uvicorn

if sys.platform == "win32":
    import asyncio
    asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())

if __name__ == "__main__":
    log_level = os.environ.get("INTERVIEWER_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.environ.get("INTERVIEWER_HOST", "localhost")
    port = int(os.environ.get("INTERVIEWER_PORT", "3001"))
    reload = os.environ.get("INTERVIEWER_RELOAD", "").lower() in ("1", "true", "yes")
    uvicorn.run(
        "interviewer.server:app",
        host=host,
        port=port,
        reload=reload,
        reload_dirs=["interviewer"] if reload else None,
        log_level=log_level.lower(),
    )
