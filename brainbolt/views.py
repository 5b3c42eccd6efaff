from rest_framework.response import Response
from rest_framework.decorators import api_view


@api_view(["GET"])
def home(request):
    return Response({"Message": "BrainBolt quiz API"})


@api_view(["GET", "POST"])
def error(request):
    return Response({"Message": "no such path"}, status=404)
