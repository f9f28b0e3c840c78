from check_domains.main import main

main()
