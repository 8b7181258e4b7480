from nixhealth.cli.app import main

main()
