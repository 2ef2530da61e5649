import argparse

from app.api.dependencies import get_database, get_profile_service


def main() -> int:
    parser = argparse.ArgumentParser(description="Register a board profile and print its API key")
    parser.add_argument("display_name", type=str)
    parser.add_argument("--email", type=str, default=None)
    parser.add_argument("--avatar-url", type=str, default=None)
    args = parser.parse_args()

    get_database().setup()
    result = get_profile_service().register_profile(
        display_name=args.display_name,
        email=args.email,
        avatar_url=args.avatar_url,
    )

    print(f"profile_id: {result.profile.id}")
    print(f"api_key:    {result.plaintext_key}")
    print("Save the API key now; it is stored hashed and cannot be shown again.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
