import uvicorn

from corsproxy.vars import HOST, LOG_LEVEL, PORT


def main():
    uvicorn.run(
        "corsproxy.server:app",
        host=HOST,
        port=PORT,
        log_level=(LOG_LEVEL or "info").lower(),
    )


if __name__ == "__main__":
    main()
