#!/usr/bin/env python3
"""Print a throwaway Ed25519 key pair for signing local test interactions."""

import nacl.encoding
import nacl.signing

signing_key = nacl.signing.SigningKey.generate()
verify_key = signing_key.verify_key

print("Add the public key to your .env file (local testing only):")
print(f"DISCORD_PUBLIC_KEY={verify_key.encode(encoder=nacl.encoding.HexEncoder).decode('utf-8')}")
print("Sign requests with the private key (keep it out of the server env):")
print(f"TIERBOT_SIGNING_KEY={signing_key.encode(encoder=nacl.encoding.HexEncoder).decode('utf-8')}")
