from ws_card_scraper.cli import main

main()
