"""Fleet, work order and inventory administration"""
