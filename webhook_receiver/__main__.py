from webhook_receiver.server import main

if __name__ == "__main__":
    main()
