"""Entry point for email-reader."""

from src.cli import main as cli_main


def main() -> None:
    """Run the email-reader CLI."""
    cli_main()


if __name__ == "__main__":
    main()
