import argparse
import asyncio
import os
import sys
from loguru import logger
from playwright.async_api import async_playwright

# Add project root to path
sys.path.append(os.getcwd())

from readall.browser.session import DEFAULT_PROFILE_DIR

LOGIN_URLS = {
    "gmail": "https://mail.google.com/",
    "outlook": "https://outlook.live.com/mail/",
    "yahoo": "https://mail.yahoo.com/",
}


async def main(provider: str, profile_dir: str):
    logger.info("Setting up browser profile for persistent webmail login...")

    profile_path = os.path.abspath(profile_dir)
    os.makedirs(profile_path, exist_ok=True)

    logger.info(f"Profile directory: {profile_path}")
    logger.info(f"Launching browser... Please log in to {provider.title()} manually.")
    logger.info("When finished, close the browser window to save the session.")

    async with async_playwright() as p:
        # Automation flags disabled so the manual login is not flagged
        context = await p.chromium.launch_persistent_context(
            user_data_dir=profile_path,
            headless=False,
            args=["--disable-blink-features=AutomationControlled", "--no-sandbox"],
            viewport={"width": 1280, "height": 800}
        )

        page = context.pages[0] if context.pages else await context.new_page()
        await page.goto(LOGIN_URLS[provider])

        print("\n" + "="*60)
        print("BROWSER READY FOR MANUAL LOGIN")
        print("="*60)
        print(f"1. Log in to {provider.title()}")
        print("2. Complete any 2FA or security challenges")
        print("3. Verify your inbox is showing")
        print("4. Close the browser window when done")
        print("="*60 + "\n")

        try:
            await page.wait_for_event("close", timeout=0)
        except Exception as e:
            logger.debug(f"Browser closed: {e}")

        logger.info("Browser closed. Verifying saved cookies...")

    cookie_file = os.path.join(profile_path, "Default", "Cookies")
    if os.path.exists(cookie_file):
        size = os.path.getsize(cookie_file)
        logger.info(f"Cookie file size: {size} bytes")
        if size > 0:
            print("✅ Profile saved with data.")
        else:
            print("⚠️ Warning: Cookie file is empty.")
    else:
        print("❌ Error: Cookie file not found.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Log in to a webmail once and keep the session')
    parser.add_argument('--provider', choices=sorted(LOGIN_URLS), default='gmail')
    parser.add_argument('--profile', default=os.getenv('READ_ALL_PROFILE_DIR', DEFAULT_PROFILE_DIR))
    args = parser.parse_args()
    try:
        asyncio.run(main(args.provider, args.profile))
    except KeyboardInterrupt:
        print("\nExiting...")
