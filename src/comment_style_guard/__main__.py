from comment_style_guard.cli import main

main()
