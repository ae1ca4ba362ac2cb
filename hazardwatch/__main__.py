import asyncio
from hazardwatch.main import main

def run():
    asyncio.run(main())

if __name__ == "__main__":
    run()
