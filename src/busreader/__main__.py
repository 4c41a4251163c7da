from busreader.main import main

main()
