"""
Generating DigiID URIs.

A relying party shows the resulting URI as a QR code (or deep link) so a
DigiID-compatible wallet can sign it.
"""

from digiid import DigiIDError, build_uri


def main() -> None:
    # 1. Secure callback (https) -> u=0
    uri = build_uri("https://myapp.example.com/api/auth/digiid")
    print("Secure URI:", uri)

    # 2. Plain http for local testing -> u=1 (must be explicitly allowed)
    uri = build_uri("http://localhost:8080/dev/callback", unsecure=True)
    print("Unsecure URI:", uri)

    # 3. Caller-supplied nonce (store it, you will need it to verify)
    uri = build_uri("https://anotherapp.com/verify", nonce="my-unique-secret-nonce-per-request-12345")
    print("Custom nonce URI:", uri)

    # 4. Missing scheme -> rejected
    try:
        build_uri("myapi.com/auth")
    except DigiIDError as exc:
        print(f"Rejected ({exc.kind.value}): {exc}")


if __name__ == "__main__":
    main()
