# run.py
import uvicorn

if __name__ == "__main__":
    # Settings are validated when the factory runs; a missing API key stops startup
    uvicorn.run(
        "modelchat.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
