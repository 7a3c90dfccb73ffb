import os

from .main import create_app


def main() -> None:
    app = create_app()
    app.run(host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "3001")))


if __name__ == "__main__":
    main()
