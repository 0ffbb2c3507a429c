#!/usr/bin/env python3
"""
admin_token.py — mint a bearer token for the /api/admin endpoints
"""
import argparse

from storefront.core.auth import create_access_token

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("email", help="Operator email to put in the token subject")
    args = ap.parse_args()

    token, exp = create_access_token(args.email, role="admin")
    print(token)
    print(f"# expires {exp.isoformat()}")

if __name__ == "__main__":
    main()
