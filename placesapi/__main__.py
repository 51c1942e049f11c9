"""
Run the API with uvicorn: `python -m placesapi`.

HOST / PORT environment variables override the defaults.
"""
import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "placesapi.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    main()
