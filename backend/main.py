import uvicorn
import os

if __name__ == "__main__":
    # Auto-reload only when RELOAD=true
    is_dev = os.getenv("RELOAD", "false").lower() == "true"

    uvicorn.run(
        "wholesale.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=is_dev,
        log_level="info"
    )
