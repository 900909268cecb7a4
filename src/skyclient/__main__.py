from skyclient.app import main

main()
