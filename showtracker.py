from cli.main import showtracker_cli


def main():
    showtracker_cli()


if __name__ == '__main__':
    main()
