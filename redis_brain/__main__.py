"""Run the redis-brain process: python -m redis_brain"""

from redis_brain.main import main

if __name__ == "__main__":
    main()
