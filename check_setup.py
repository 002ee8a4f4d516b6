#!/usr/bin/env python3
"""
Quick setup verification script
Run this to check if your environment is configured correctly
"""

import os
import sys


def check_python_version():
    """Check Python version"""
    version = sys.version_info
    if version.major < 3 or (version.major == 3 and version.minor < 11):
        print("❌ Python 3.11+ required")
        return False
    print(f"✅ Python {version.major}.{version.minor}.{version.micro}")
    return True


def check_dependencies():
    """Check if required packages are installed"""
    required = [
        'fastapi',
        'uvicorn',
        'sqlalchemy',
        'alembic',
        'pydantic_settings',
        'httpx',
        'jwt',
        'passlib',
        'stripe',
        'click',
    ]
    missing = []
    for package in required:
        try:
            __import__(package)
            print(f"✅ {package}")
        except ImportError:
            print(f"❌ {package} - MISSING")
            missing.append(package)
    return len(missing) == 0


def check_env_file():
    """Check if .env file exists"""
    if os.path.exists('.env'):
        print("✅ .env file exists")
        return True
    print("❌ .env file not found")
    print("   Run: cp .env.example .env")
    return False


def check_settings():
    """Check that the database and payment processors are configured"""
    try:
        from lessonbook.core.config import settings
    except Exception as e:
        print(f"⚠️  Could not load settings: {e}")
        return False

    ok = True
    if settings.database_url:
        print("✅ DATABASE_URL set")
    else:
        print("❌ DATABASE_URL not set - data routes will answer 503")
        ok = False
    print("✅ Stripe configured" if settings.stripe_secret_key else "⚠️  STRIPE_SECRET_KEY not set")
    if settings.paypal_client_id and settings.paypal_client_secret:
        print(f"✅ PayPal configured ({settings.paypal_mode})")
    else:
        print("⚠️  PayPal credentials not set")
    return ok


def main():
    print("🔍 Checking LessonBook Backend Setup...\n")

    checks = [
        ("Python Version", check_python_version),
        ("Dependencies", check_dependencies),
        (".env File", check_env_file),
        ("Settings", check_settings),
    ]

    results = []
    for name, check_func in checks:
        print(f"\n{name}:")
        results.append(check_func())

    print("\n" + "=" * 50)
    if all(results):
        print("✅ All checks passed! You're ready to run the server.")
        print("\nNext steps:")
        print("  1. Run migrations: alembic upgrade head")
        print("  2. Create an admin: lessonbook-admin promote --email you@example.com")
        print("  3. Start server: uvicorn lessonbook.main:app --reload")
    else:
        print("❌ Some checks failed. Please fix the issues above.")
        sys.exit(1)


if __name__ == "__main__":
    main()
