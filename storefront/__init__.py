"""
外卖店铺后端服务
"""
