from payment_ledger.entrypoints.cli import main

main()
