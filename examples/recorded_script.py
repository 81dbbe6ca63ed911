"""
Example: Recorded Script

What a generated script looks like when it runs on the replay runtime:
every step waits for the page to settle, targets carry ranked candidate
locators, and the last step cross-checks the project count.
"""

import asyncio

from playwright.async_api import async_playwright

from replay_runtime import LocatorDescriptor, ReplaySession
from replay_runtime.config import load_config
from replay_runtime.utils import setup_logging_from_settings

BASE_URL = "https://app.example.com"


async def main():
    """Replay the recorded dashboard check."""
    settings = load_config()
    setup_logging_from_settings(settings.logging)
    
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True)
        page = await browser.new_page()
        
        async with ReplaySession.for_page(page, settings=settings, run_id="dashboard", export=True) as session:
            async with session.step(1, "Open login page"):
                await page.goto(f"{BASE_URL}/login")
            
            async with session.step(2, "Fill email"):
                email = await session.resolve([
                    LocatorDescriptor.role("textbox", name="Email"),
                    LocatorDescriptor.css("input#email"),
                    LocatorDescriptor.xpath("//form[1]/input[1]"),
                ])
                await email.handle.locator.fill("demo@example.com")
            
            async with session.step(3, "Fill password"):
                password = await session.resolve([
                    LocatorDescriptor(kind="label", value="Password"),
                    LocatorDescriptor.css("input[type=password]"),
                ])
                await password.handle.locator.fill("demo")
            
            async with session.step(4, "Sign in"):
                button = await session.resolve([
                    LocatorDescriptor.role("button", name="Sign in"),
                    LocatorDescriptor.test_id("login-submit"),
                ])
                await button.handle.locator.click()
            
            async with session.step(5, "Read project count"):
                fragment = await session.capture_fragment([
                    LocatorDescriptor.css(".stat-number"),
                    LocatorDescriptor.text("Projects"),
                ])
            
            async with session.step(6, "Fetch project stats"):
                response = await session.request(
                    {
                        "url": f"{BASE_URL}/api/projects/stats",
                        "method": "get",
                        "auth": {
                            "type": "bearer",
                            "token_storages": [{"type": "localStorage", "key": "access_token"}],
                        },
                    },
                    step_index=6,
                )
            
            async with session.step(7, "Verify project count", screenshot=True):
                # Rows as returned by: SELECT COUNT(*) AS count FROM projects
                db_rows = [{"count": 5}]
                session.exporter.export_db_result(
                    db_rows, step_index=7, query="SELECT COUNT(*) AS count FROM projects"
                )
                consistent = session.verify([fragment], [db_rows], [response.body])
                print(f"UI, DB and API agree: {consistent}")
        
        await browser.close()


if __name__ == "__main__":
    asyncio.run(main())
